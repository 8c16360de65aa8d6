"""Domain layer: directory model, ports and the pipelines built on them."""
