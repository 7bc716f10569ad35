"""
birdie
Messenger test bot exercising the fbmessenger client.
"""
