from .client import AccessToken, AmadeusClient, CreatedOrder, Location

__all__ = ["AccessToken", "AmadeusClient", "CreatedOrder", "Location"]
