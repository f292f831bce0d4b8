"""Motorola SB6121. No auth; everything we want is on one unauthenticated HTML page."""
