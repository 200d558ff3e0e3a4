"""
Locality graph for the Kathmandu valley.

Responsibilities:
- Hold the static catalog of service localities.
- Build the undirected weighted adjacency once per process.
- Resolve free-form identifiers (slug or display name) to localities.
- Answer shortest road routes (Dijkstra) and straight-line neighbourhood queries.
"""
