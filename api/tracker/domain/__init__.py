"""Domain value types shared by the view services."""
