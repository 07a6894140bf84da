import os
import importlib

# Automatically import all .py files in the tables directory so that
# SQLModel.metadata knows every table before create_all
tables_path = os.path.dirname(__file__)
for file in sorted(os.listdir(tables_path)):
    if file.endswith(".py") and file != "__init__.py":
        module_name = file[:-3]  # Remove ".py" extension
        importlib.import_module(f"{__name__}.{module_name}")
