from utils.output_utils import OutputHandler
from utils.input_utils import InputHandler
from utils.logging_utils import LoggingHandler


class UtilsHandler:
    """
    Container for utility services, created lazily on first access.
    """

    def __init__(self, config, input_locale=None):
        """
        :param config: RuntimeConfig (or anything exposing get_option)
        :param input_locale: optional InputLocale; defaults to the [INPUT] config section
        """
        self.config = config
        self.input_locale = input_locale
        self._output = None
        self._input = None
        self._logger = None

    @property
    def output(self):
        if self._output is None:
            self._output = OutputHandler(self.config)
        return self._output

    @property
    def logger(self):
        if self._logger is None:
            self._logger = LoggingHandler(self.config, self.output)
        return self._logger

    @property
    def input(self):
        if self._input is None:
            self._input = InputHandler(self.config, self.output, self.logger, self.input_locale)
        return self._input
