"""
vestledger core: exceptions, checked arithmetic, configuration, logging and metrics.
"""
