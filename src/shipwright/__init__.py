"""shipwright: clone, provision and deploy a Dockerized app over SSH."""

__version__ = "0.1.0"
