"""Terminal host for flashdeck."""
