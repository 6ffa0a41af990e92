"""
Flatteners Package.

Service-specific modules converting between desired fields and AWS API
request / response structures.
"""
