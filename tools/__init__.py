"""Adaptadores externos: ruido, tabla de Marching Cubes y exportación de mallas."""
