"""Step 02: triangle meshes for accepted plane patches."""
