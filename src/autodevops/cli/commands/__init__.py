"""CLI command modules grouped by pipeline job.

- image: build, test, registry-login, fetch-submodules
- release: deploy, delete, create-secret, initialize-database,
  deploy-name, secret-name
- cluster: kube-auth, ensure-namespace, setup-helm
"""

from . import cluster, image, release

__all__ = ["cluster", "image", "release"]
