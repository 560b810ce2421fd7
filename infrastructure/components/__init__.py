"""
Building blocks composed by MinecraftStack
"""
