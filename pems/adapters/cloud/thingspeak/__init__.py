from .client import ThingSpeakClient, ThingSpeakHTTPError

__all__ = ['ThingSpeakClient', 'ThingSpeakHTTPError']
