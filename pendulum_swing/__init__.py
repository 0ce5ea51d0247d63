"""Interactive damped pendulum with tones at the swing peaks."""
