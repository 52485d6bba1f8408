"""hostdeploy - containerized app deployment to a single remote host"""

__version__ = "1.0.0"
