class PumpfunFetchError(Exception):
    pass


class PumpfunAuthError(PumpfunFetchError):
    pass


class PumpfunResponseError(PumpfunFetchError):
    pass
