"""Domain layer: images, cells, handles and the rules that govern them."""
