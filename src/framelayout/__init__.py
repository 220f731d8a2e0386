"""framelayout — frame-indexed timeline layout and per-frame snapshots.

Turn a list of timeline clips into frame-indexed layout items, answer
"what is on screen at frame N" in O(log n), and compose the per-frame
geometry a renderer needs (video rectangle, device mockup, transforms).
Timelines can be declared in YAML manifests for inspection and previews.
"""
