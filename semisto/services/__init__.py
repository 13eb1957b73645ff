"""Business logic: catalog resolution, cart, step workflows and portal data."""
