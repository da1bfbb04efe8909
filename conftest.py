pytest_plugins = ["reqbuilder.presentation.pytest_plugin"]
