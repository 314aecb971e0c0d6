# Path: core/__init__.py
# Purpose: Package initializer for the badge collection core.
# Layer: core.
# Details: Groups the domain models, badge storage, and the discovery pipeline.
