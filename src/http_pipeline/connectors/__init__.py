# Connectors package
