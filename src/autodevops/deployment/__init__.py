"""Image build and Kubernetes release workflows."""
