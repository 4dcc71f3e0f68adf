"""Auto DevOps release tooling.

Builds container images, provisions per-track databases and deploys or
removes Helm-rendered application releases in a Kubernetes namespace by
sequencing docker, helm and kubectl invocations.
"""

__version__ = "0.1.0"
