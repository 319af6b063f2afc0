from engine.Core import Core, GameEvent


class Interface:

    def __init__(self):
        self.core: Core = None

    def onStart(self):
        pass

    def onEvent(self, event: GameEvent):
        """
        Invoked after the engine changed the board, the move counter or the game status.
        :param event:
        :return:
        """
        self.notifyRedraw()

    def notifyRedraw(self):
        pass

    def onWin(self):
        pass

    def onLose(self):
        pass
