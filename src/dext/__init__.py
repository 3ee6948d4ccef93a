"""dext: plugin and theme manager for the Dext launcher."""
