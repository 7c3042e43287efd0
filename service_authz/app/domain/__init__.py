"""
Domain records shared by every stage of the decision pipeline.
"""
