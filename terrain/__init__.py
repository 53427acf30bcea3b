"""
Generación de terreno volumétrico: muestreo de un campo de densidad con ruido,
triangulación por celdas con Marching Cubes en un pool de hilos y ensamblado
de una malla indexada con normales suaves.
"""

__all__ = [
    "indexing",
    "density",
    "cells",
    "aggregate",
    "assemble",
    "generator",
    "config",
    "errors",
    "cli",
]
