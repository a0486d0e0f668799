"""HTTP API: application factory, request pipeline, routes and schemas."""
