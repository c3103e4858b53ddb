"""Blog posts with Markdown or uploaded-PDF bodies."""
