from .services.quack import QuackClient

__version__ = "0.1.0"

__all__ = ['QuackClient', '__version__']
