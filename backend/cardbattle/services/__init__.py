"""Domain services.

Battle rules live here, apart from the HTTP routes and socket handlers
that call into them.
"""
