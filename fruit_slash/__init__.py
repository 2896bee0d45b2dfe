"""
Fruit Slash
===========

Swipe-to-slice arcade game core and its reference score backend.

- slash_core: physics, spawning, gestures, collisions and the session state machine
- backend: score reporting contract and an in-memory score board

All tunable parameters are in game_config.yaml.
"""
