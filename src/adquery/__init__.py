"""Directory lookup and authentication for Active Directory."""
