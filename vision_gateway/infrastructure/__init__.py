"""
Infrastructure Layer

State owned by the gateway that is not part of the request-cycle logic itself.
"""
