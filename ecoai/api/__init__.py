"""EcoAI HTTP surface: app factory, dependencies, schemas and routers."""
