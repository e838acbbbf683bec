"""Classic 9x9 Sudoku backends."""
