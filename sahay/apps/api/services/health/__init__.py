"""Health metrics, insights and nudges."""
