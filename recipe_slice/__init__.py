"""
Recipe Slice
============

Rule engine for a fruit-slicing arcade game where each level asks the player
to slice a recipe: a set of fruit, in counts and usually in order.

- Recipe construction and level progression
- Slice validation with structured loss reasons
- Adaptive weighted spawning steered toward the next needed fruit
- Retry of the exact failed recipe

All tunable parameters are in game_config.yaml.
"""
