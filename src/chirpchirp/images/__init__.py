"""Images domain: stored images, their species attributions, and listing logic."""
