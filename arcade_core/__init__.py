"""
Pocket Arcade core Python package.

Pure game logic for the arcade bundle, kept free of any UI so each engine
can be driven from the Flask app, the CLI or the tests.
Modules:
- grid.py: Grid, Coord
- state.py: Status, Level, Notice, MoveResult
- sudoku.py, minesweeper.py, tictactoe.py, watersort.py, wordle.py,
  memory.py, snake.py, colorburst.py: one engine per game
- settings.py, scores.py, haptics.py, timers.py: collaborators
- session.py: GameSession wiring an engine to its collaborators
- cli.py: terminal driver
"""
