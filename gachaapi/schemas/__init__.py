from .balance import XuBalanceResponse
from .gacha import GachaItemPublic, SpinRequest, SpinResponse, SpinHistoryResponse
from .webhook import HaravanOrderEvent, PaymentApplyResult, PaymentOutcome
