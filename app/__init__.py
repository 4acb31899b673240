"""HTTP server and periodic polling loops"""
