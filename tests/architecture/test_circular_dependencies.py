import importlib


def test_circular_dependencies():
    """Test if modules can be imported without circular dependencies"""
    # List of all modules to test in dependency order
    modules = [
        # Independent modules (no internal deps)
        'dbutil.exceptions',
        'dbutil.naming',

        # Spec and binding
        'dbutil.options',
        'dbutil.context',
        'dbutil.identifiers',

        # Rows and cursors
        'dbutil.row',
        'dbutil.cursor',

        # Strategy (self-contained with raw execution)
        'dbutil.strategy',
        'dbutil.strategy.base',
        'dbutil.strategy.postgres',
        'dbutil.strategy.sqlite',

        # Connection and query
        'dbutil.connection',
        'dbutil.query',

        # Operations
        'dbutil.metadata',
        'dbutil.data',

        # Main package
        'dbutil',
    ]

    results = {}
    for module in modules:
        print(f'Checking {module}... ', end='')
        try:
            importlib.import_module(module)
            print('✓ Success')
            results[module] = True
        except Exception as e:
            print(f'✗ Failed: {e}')
            results[module] = False

    failures = [m for m, v in results.items() if not v]
    if failures:
        print('\nFailed modules:')
        for module in failures:
            print(f'  - {module}')

    assert not failures, f'{len(failures)} modules failed circular dependency check'


if __name__ == '__main__':
    __import__('pytest').main([__file__])
