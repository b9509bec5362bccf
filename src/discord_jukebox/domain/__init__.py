"""
Domain Layer

Pure models with no I/O: track records, queues, input variants, events,
exceptions, and message constants.
"""
