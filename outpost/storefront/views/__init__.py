from .api import product_group_json, rgb_values_json

__all__ = ["product_group_json", "rgb_values_json"]
