"""Autoscaler status models, projection and gauge registry"""
