"""Domain modules for kubenode-mcp."""
