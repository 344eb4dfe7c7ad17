"""Truck navigation core: routing, sequencing and hazard evaluation."""
