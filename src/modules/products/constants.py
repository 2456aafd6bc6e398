"""Product domain constants."""

# Largest value a PositiveIntegerField holds on every supported backend.
STOCK_MAX = 2_147_483_647
