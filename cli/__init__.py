"""DiagramForge command line interface"""
