"""Battle Report Engine - Services"""
