"""Model independent pieces: the Signal data model, the Modem capability and the model registry.

Model specific code lives in its own package (hnap, sb6121) and registers itself with a
ModemRegistry through modem.catalog.
"""
