"""scicalc: keypad-driven scientific calculator.

Key presses build an expression string; "=" hands it to SymPy and shows the
result. The state machine lives in ``scicalc.controller`` and is usable
without any rendering:

    >>> from scicalc.controller import Calculator
    >>> calc = Calculator()
    >>> for key in ["2", "^", "1", "0", "="]:
    ...     state = calc.press(key)
    >>> state.display
    '1024'

Usage:
    python -m scicalc run                       # Interactive keypad
    python -m scicalc eval "sin(90)" -a deg     # One-shot evaluation
"""
