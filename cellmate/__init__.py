"""CellMate: an AI biology tutor with a 3D molecular viewer."""
