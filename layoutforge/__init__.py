"""layoutforge: LLM-driven document styling.

Turns a free-form style request and a block of text into a reusable design
system (Tailwind utility classes) and a restyled markdown document.
"""

__version__ = "0.1.0"
