"""Domain layer: the Product aggregate, its events and its persistence port.

Nothing here performs I/O; infrastructure implements the ports.
"""
