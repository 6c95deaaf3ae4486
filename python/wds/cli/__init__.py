"""
The command-line interface to the data service tools.  The :program:`wds` script is assembled from
the subcommands defined in this package using the infrastructure in :py:mod:`wds.utils.cli`.

EXIT STATUS

The commands in this package use the following exit status codes:

  0 - normal successful completion
  1 - a general processing failure
  2 - an error was found in the option or argument values, preventing proper parsing or interpretation
  3 - a digest could not be read, or two digests cannot be compared
  4 - error occured while writing output data
  6 - a configuration error was detected

The value 200 is returned if any unexpected, uncaught exception bubbles to the top of the execution
stack.
"""
