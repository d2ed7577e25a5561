"""
Editing engine for the image editor.

- edited_image: Authoritative image state and undo/redo history
- frame: Crop rectangle geometry
- annotations: Rectangle and text annotations
- editor_controller: Event routing, preview rendering and commits
"""
