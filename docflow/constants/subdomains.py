"""
Reserved subdomain lists.

The request router and organization registration use different lists.
``docs.example.com`` is routed to an organization named ``docs`` even though
no organization can register that name. The lists are kept apart until that
is settled as a product decision.
"""

# Hosts with these first labels are served as the main site
ROUTING_RESERVED_SUBDOMAINS = frozenset({"www", "api", "admin", "app", "mail", "ftp"})

# Names an organization may not register
ORGANIZATION_RESERVED_SUBDOMAINS = ROUTING_RESERVED_SUBDOMAINS | frozenset(
    {"blog", "docs", "support", "help", "status", "staging", "dev", "test"}
)

SUBDOMAIN_PATTERN = r"[a-z0-9]([a-z0-9-]{1,61}[a-z0-9])?"
SUBDOMAIN_MIN_LENGTH = 3
SUBDOMAIN_MAX_LENGTH = 63
