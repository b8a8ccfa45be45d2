"""HTTP routers mounted by ``main.create_app``."""
