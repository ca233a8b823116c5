"""Bootstrap layer wiring DashScope connection properties into ready-to-use clients and models."""

__version__ = '0.1.0'
