"""JurisAI - AI-assisted litigation workbench"""

__version__ = "0.1.0"
