"""Imagesmith core: poll loop, build pipeline, state store and build slot."""
