"""clipanimate — keyframe animation and timeline compositing.

Declare clips (shapes whose position, size and color are keyframed over
time), schedule them on a video timeline, and export every frame through a
software renderer into a frame sink (ffmpeg, PNG sequence, or memory).
Scenes can be built in Python or declared in YAML manifests.
"""
