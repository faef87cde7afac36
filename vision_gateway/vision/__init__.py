"""
Vision Layer

Detection models, remote providers, capture sources and the request
gateway that ties them together.
"""
