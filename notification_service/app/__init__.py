"""HTTP application: factory, lifespan, routing and error rendering."""
